"""
Command-Line Interface for News RAG

Provides CLI commands for:
- Listing recent news
- Ingesting recent news or articles from a JSON file
- RAG-based question answering
- System statistics
"""

import sys
import json
import argparse
import logging

from .errors import NewsRAGError, ValidationError, describe_error
from .main_pipeline import NewsQuerySystem


def setup_logging(verbose: bool = False):
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def cmd_news(args, system: NewsQuerySystem):
    """Handle the news command."""
    articles = system.list_news(args.limit)

    if args.json:
        print(json.dumps(articles, ensure_ascii=False, indent=2))
        return

    if not articles:
        print("No news available.")
        return

    for i, article in enumerate(articles, 1):
        print(f"[{i}] {article['title']}")
        print(f"    {article['link']}")
        if article.get('pubDate'):
            print(f"    Published: {article['pubDate']}")
        if article.get('description'):
            print(f"    {article['description']}")
        print()


def cmd_ingest(args, system: NewsQuerySystem):
    """Handle the ingest command."""
    if args.file:
        with open(args.file, 'r', encoding='utf-8') as f:
            try:
                articles = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError(f"{args.file} is not valid JSON: {e}")
        print(f"Ingesting articles from: {args.file}")
        report = system.ingest(articles)
    else:
        print("Fetching and ingesting recent news...")
        report = system.ingest_recent(args.limit)

    print(f"\n{'='*60}")
    print("Ingestion Summary:")
    print(f"  Processed: {report['processed']}")
    print(f"  Skipped: {report['skipped']}")
    print(f"  Chunks stored: {report['chunks']}")
    print(f"{'='*60}")

    if report['skipped_articles']:
        print("\nSkipped articles:")
        for item in report['skipped_articles']:
            print(f"  - {item['url']}: {item['reason']}")


def cmd_ask(args, system: NewsQuerySystem):
    """Handle the ask command."""
    result = system.answer(args.question)

    if args.json:
        print(json.dumps(result, ensure_ascii=False, indent=2))
        return

    print("Answer:")
    print(result['answer'])
    print()

    if result['sources']:
        print("Sources:")
        for i, source in enumerate(result['sources'], 1):
            print(f"  [{i}] {source['metadata']['title']} ({source['similarity']:.3f})")
            print(f"      {source['metadata']['url']}")


def cmd_stats(args, system: NewsQuerySystem):
    """Handle the stats command."""
    stats = system.get_stats()

    print("="*60)
    print("System Statistics")
    print("="*60)

    vs_stats = stats['vector_store_stats']
    print("Vector Store:")
    print(f"  Total Chunks: {vs_stats.get('total_vectors', 0)}")
    print(f"  Total Articles: {vs_stats.get('total_articles', 0)}")
    print(f"  Dimension: {vs_stats.get('dimension', 'N/A')}")
    print(f"  Index Type: {vs_stats.get('index_type', 'N/A')}")

    cache_stats = stats.get('cache_stats')
    if cache_stats:
        print()
        print("Embedding Cache:")
        print(f"  Cache Size: {cache_stats.get('cache_size', 0)}")
        print(f"  Hit Rate: {cache_stats.get('hit_rate', 0):.2%}")
    print("="*60)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog='news-rag',
        description='News RAG - ingest news articles and ask questions about them',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List recent news
  news-rag news --limit 10

  # Ingest recent news
  news-rag ingest

  # Ingest articles listed in a JSON file
  news-rag ingest --file articles.json

  # Ask a question
  news-rag ask "What happened to gold prices this week?"
        """
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    news_parser = subparsers.add_parser('news', help='List recent news')
    news_parser.add_argument('--limit', type=int, default=None, help='Number of articles')
    news_parser.add_argument('--json', action='store_true', help='Print raw JSON')
    news_parser.set_defaults(func=cmd_news)

    ingest_parser = subparsers.add_parser('ingest', help='Ingest articles into the vector store')
    ingest_parser.add_argument(
        '--limit',
        type=int,
        default=None,
        help='Number of recent articles to ingest'
    )
    ingest_parser.add_argument(
        '--file',
        help='JSON file with a list of articles (title, link, ...)'
    )
    ingest_parser.set_defaults(func=cmd_ingest)

    ask_parser = subparsers.add_parser('ask', help='Ask a question about the ingested news')
    ask_parser.add_argument('question', help='Question to ask')
    ask_parser.add_argument('--json', action='store_true', help='Print raw JSON')
    ask_parser.set_defaults(func=cmd_ask)

    stats_parser = subparsers.add_parser('stats', help='Display system statistics')
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args, NewsQuerySystem(show_progress=True))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except ValidationError as e:
        print(f"\n✗ {describe_error(e)}")
        sys.exit(2)
    except (NewsRAGError, OSError) as e:
        print(f"\n✗ {describe_error(e)}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()

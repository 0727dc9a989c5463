"""Article ingestion: news listing, scraping, chunking and indexing."""

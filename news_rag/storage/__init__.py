"""Vector storage backends."""

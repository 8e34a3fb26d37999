"""Document chunking, indexing, similarity search, retrieval-augmented answers and a JSON API."""
"""HTTP relay that keeps indexer API keys server-side"""

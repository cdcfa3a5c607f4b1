"""Search store layer — Document stores over search engine clients.

Built-in backends:
  - elasticsearch: Elasticsearch v8+ (official async client)
  - opensearch: OpenSearch v2+ (AWS-compatible Elasticsearch fork)

Subclass ``SearchStore`` to back the same contract with another engine.
"""

"""CLI tools for tenant-rag.

- ``python -m tenant_rag.cli.ingest`` -- create, clear and delete tenants;
  ingest text, PDF, TXT and JSON batch documents.
- ``python -m tenant_rag.cli.ask`` -- answer a question from a tenant's
  documents.

Heavy imports (providers, vector stores) are deferred inside the command
runners so ``--help`` stays fast.
"""

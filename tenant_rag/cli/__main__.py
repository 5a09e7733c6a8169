"""Allow ``python -m tenant_rag.cli`` execution."""

from tenant_rag.cli.ingest import main

main()

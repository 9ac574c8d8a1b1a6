"""Command line interface; run with `python -m payroll_ingest.cli`."""

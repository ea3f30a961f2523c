"""Command line tool for syncing catalog templates from a chart repository."""

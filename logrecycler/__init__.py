"""logrecycler — annotate unstructured log lines into ordered JSON records."""

__version__ = "0.1.0"

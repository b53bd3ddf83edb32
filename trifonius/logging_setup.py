"""CLI logging setup: plain %(message)s output with secret redaction."""

import logging
import sys

from trifonius.redact import SecretRedactingFilter


def setup_cli_logging(verbose: bool = False):
    """Configure the root logger for CLI commands.

    Output looks like print(); ``verbose`` lowers the level to DEBUG so the
    resolution steps are shown too. httpx request logging stays at WARNING
    unless verbose.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)

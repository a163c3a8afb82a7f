"""Inbound webhook surface: signature verification and the HTTP app."""
from invoicer.api.verification import SIGNATURE_HEADER, compute_signature, verify_signature

__all__ = ["SIGNATURE_HEADER", "compute_signature", "verify_signature"]

from .data_cleaner import build_form_prefill, normalize_receipt_date

__all__ = ["build_form_prefill", "normalize_receipt_date"]

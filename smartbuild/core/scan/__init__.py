from .smart_scan import AutoFix, ScanReport, candidate_symbol_name, smart_scan

__all__ = ["AutoFix", "ScanReport", "candidate_symbol_name", "smart_scan"]

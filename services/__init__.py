"""
Services

Pure calculation, no status changes of their own:
- elimination_service: pick result -> eliminated or not
- advancement_service: what "advance" should do next
- report_service: public per-round summary
"""

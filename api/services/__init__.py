"""
Rapport Services Package.

Business logic behind the API routes.

Key service modules:
- extraction: backend selection and the FactExtractionService singleton
- rule_extractor: deterministic regex/keyword extractor
- model_extractor: model-backed extractor (chunk, call, parse, dedup)
- reshaper: categorized facts -> four-list envelope
- file_text: text from .txt/.pdf/.docx uploads
- person_state: client-side people, messages and items
"""

"""screener_server — FastAPI REST API for the tariff screener SDK.

Exposes screener sessions over HTTP: session management, answers and
navigation, lead capture, plain-text rendering, and reference data.
Sessions live in process memory only.
"""

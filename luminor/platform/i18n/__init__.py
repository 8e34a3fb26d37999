"""Locales, message catalogues, request context, formatting and locale-routing middleware."""
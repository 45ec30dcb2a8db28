"""
Krishi AI - Core Package

Modules:
    - config: environment / .env settings
    - database: sqlite store for the offline mode
    - backend: profile / farm-data record store (supabase or sqlite)
    - auth: identity provider client and session events
    - profile: farmer profile and farm data load / save
    - market: mandi price sample data and filtering
    - schemes: government scheme catalogue and filtering
    - analysis: disease detection and crop recommendation
    - weather: OpenWeather lookup with sample fallback
    - dashboard: dashboard cards, mascot and achievements
    - routes: route table and sign-in guard
    - messages: Hindi / English notices
"""

__version__ = "1.0.0"
__description__ = "Crop advice, mandi prices and schemes for Indian farmers"

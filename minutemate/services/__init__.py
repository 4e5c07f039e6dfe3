"""Clients for external APIs (Supabase, Calendly, OpenAI)"""

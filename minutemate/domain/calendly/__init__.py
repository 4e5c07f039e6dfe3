"""Calendly domain - OAuth connection and event type availability"""

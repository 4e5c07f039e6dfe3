"""Onboarding domain - expert wizard progress and redirects"""

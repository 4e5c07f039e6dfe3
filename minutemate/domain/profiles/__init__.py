"""Profiles domain - user profile fields and storage uploads"""

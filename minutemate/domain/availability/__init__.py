"""Availability domain - expert session setup and pricing"""

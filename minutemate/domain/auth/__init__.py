"""Auth domain - Supabase sign-up, sign-in and email confirmation"""

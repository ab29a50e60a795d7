"""Nash Cards — Pricing Engine"""

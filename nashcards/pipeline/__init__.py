"""Nash Cards — Catalog Pipeline"""

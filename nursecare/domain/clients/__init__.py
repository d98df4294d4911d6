"""Clients domain - Organization client records"""

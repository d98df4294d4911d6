"""Scheduling domain - Staff shifts, confirmations and swap requests"""

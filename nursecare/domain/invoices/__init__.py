"""Billing domain - Invoices generated from completed shifts"""

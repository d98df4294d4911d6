"""Invitations domain - Client and staff invitation links and onboarding"""

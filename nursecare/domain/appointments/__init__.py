"""Appointment domain - Client bookings with nurses and Dodo Payments checkout"""

"""Care records domain - Client notes, reminders, care plans and care logs"""

"""Staff domain - Organization staff roster"""

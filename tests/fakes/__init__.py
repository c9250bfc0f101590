"""In-memory stand-ins for the Google adapters"""

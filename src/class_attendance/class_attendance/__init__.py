"""Class attendance package.

Organized by feature modules (schedules, sessions, attendance, ...) with a thin
Flask controller layer over service/repository layers that talk to a document
store.
"""

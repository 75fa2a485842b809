# backend/certifyone/__init__.py
"""
certifyone: training / certification tracking backend.

Apps live in certifyone/apps/*:
- storage      durable name/value slots
- events       in-process event broker (store notifications)
- training     record model, store, persistence, reports, router
- exports      CSV export of training records
- accounts     demo authentication and the current session
- preferences  theme / font-size slots
"""

"""
Notifications.

- models.py: kinds, SMTP config, delivery outcome
- renderer.py: Jinja2 layouts per kind
- dispatcher.py: recipient resolution + one SMTP send per call
"""

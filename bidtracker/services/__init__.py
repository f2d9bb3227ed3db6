# bidtracker/services/__init__.py

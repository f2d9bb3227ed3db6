# bidtracker/middleware/__init__.py

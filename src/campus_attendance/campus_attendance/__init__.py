"""Campus attendance package.

GPS-verified attendance sessions for course sections, organized by feature
modules (sessions, checkins, excuses, reports, ...) with a thin Flask
controller layer over service/repository layers.
"""

# src/bgcargo/utils/__init__.py

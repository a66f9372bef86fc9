"""Core Services Module

Contains the foundations all engine components depend on:
- exceptions: error taxonomy
- logging_config: centralized logging
- config_manager: layout, view, render and record schema configuration
"""

"""
Google Spreadsheet MCP Server

A Model Context Protocol (MCP) server for Google Drive and Google Sheets.
Exposes a path-addressed view of one Drive folder and the spreadsheets in it.
"""

__version__ = "1.0.0"

"""Structured levelled logging with hooks, fields and text and JSON formatters."""
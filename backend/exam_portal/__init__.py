"""Application package for the exam portal authoring and entry flows.

This package exposes the question editor, the quiz and exam-entry
services, the exam API client and the FastAPI application that hosts
the authoring flows. Individual modules contain the concrete
implementations and documentation.
"""

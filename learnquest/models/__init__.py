"""Pydantic models for progression state, achievements, notifications and events"""

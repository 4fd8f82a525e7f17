"""Shared configuration, logging and reporting helpers."""

"""Markdown prompt templates shipped as package data"""

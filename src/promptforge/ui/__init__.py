"""Gradio front end for PromptForge."""

"""MCP tool server for GitLab, Azure and budget provisioning.

The server exposes GitLab and Azure inspection tools, an Azure consumption
budget provisioning tool that delivers its change as a GitLab merge
request, and a handful of demo tools, prompts and resources.
"""

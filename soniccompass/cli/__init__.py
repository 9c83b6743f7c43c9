# =============================================================================
# soniccompass/cli/__init__.py: CLI Module Overview
# =============================================================================
#
# Command-line access to the same flows the API exposes, for scripting and
# for checking API keys without a browser:
#
#   search    geocode a city and list the concerts around it
#   playlist  search, then generate one song per artist with video links
#   publish   search, generate, and save the songs as a private YouTube
#             playlist (needs a Google OAuth access token)
#
# Architecture Notes:
#   - argparse only; no extra CLI dependency.
#   - soniccompass.main is imported inside the command functions so that
#     --help stays fast and does not read settings.
# =============================================================================

"""Command-line tools for SonicCompass.

- ``python -m soniccompass.cli search Spartanburg``
- ``python -m soniccompass.cli playlist Spartanburg --genre Rock --days 30``
- ``python -m soniccompass.cli publish Spartanburg --access-token ya29...``
"""

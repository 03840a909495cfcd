# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the PDX-DIY API:
# - test_config.py: Environment validation and divergence warnings
# - test_models.py: Event schema validation
# - test_analytics.py: PostHog handle and safe helpers
# - test_resend_client.py: Resend email client
# - test_auth.py: Magic-link flow and session strategies
# - test_events.py: Event endpoints
# - test_app.py: App factory, health and public config
#
# Run tests with: pytest
# =============================================================================

"""
Services layer - business logic, no HTTP.

- report_service: intake, lookup, status change, reporter history
- classification_orchestrator: background risk classification per report
- risk_classifier + ai_plugin: provider call, timeout and strict parsing
- alert_emitter: outbreak alert policy
- map_service: role-filtered map view
- reporter_service: profiles and role resolution
"""

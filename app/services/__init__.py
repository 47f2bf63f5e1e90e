"""
Services module for the collaborators the relay talks to.

Key components:
- call_service: Places recorded outbound calls through the Twilio REST API and
  builds the TwiML that connects calls to the media stream endpoint.
- recording_service: Downloads finished call recordings from Twilio into the
  recordings directory.
- appointment_store: Persists appointments scheduled during calls as JSON files.

Usage examples:
```python
from app.services.call_service import CallService

service = CallService(account_sid, auth_token, from_number)
call_sid = await service.place_call("+5511999999999", host="relay.example.com")
```
"""

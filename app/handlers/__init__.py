"""
Handlers module for the decisions a relayed call has to make.

Key components:
- interruption: Cuts the response being played short when the caller starts
  speaking, producing the truncate and clear frames and resetting playback state.
- function_calls: Executes the appointment scheduling tool when the model calls it,
  persists the appointment and feeds the result back to the model.

Usage examples:
```python
from app.handlers.interruption import interrupt_response

interruption = interrupt_response(session)
if interruption is not None:
    if interruption.truncate is not None:
        await realtime_client.send_event(interruption.truncate)
    await twilio_websocket.send_text(interruption.clear.model_dump_json())
```
"""

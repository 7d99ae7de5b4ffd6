"""
Core — Response Renderer

Successful responses are wrapped as
  { "success": true, "data": ..., "meta": ... }

``meta`` is only present for paginated lists. Ledger pages are
cursor-paginated and carry no count, so ``meta.count`` is null there.

@file core/renderers.py
"""

from rest_framework.renderers import JSONRenderer


def _is_page(data) -> bool:
    return isinstance(data, dict) and 'results' in data and 'next' in data


class StandardJSONRenderer(JSONRenderer):

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = (renderer_context or {}).get('response')
        passthrough = (
            (response is not None and (response.status_code >= 400 or response.status_code == 204))
            or (isinstance(data, dict) and 'success' in data)
        )
        if passthrough:
            return super().render(data, accepted_media_type, renderer_context)

        if _is_page(data):
            envelope = {
                'success': True,
                'data': data['results'],
                'meta': {key: data.get(key) for key in ('count', 'next', 'previous')},
            }
        else:
            envelope = {'success': True, 'data': data}
        return super().render(envelope, accepted_media_type, renderer_context)

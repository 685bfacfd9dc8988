from flask import request, g, current_app

SUPPORTED_LOCALES = ('sl', 'en')


def get_language():
    """Pick the content locale: ?locale=, then Accept-Language, then the default"""
    if hasattr(g, 'language'):
        return g.language

    requested = (request.args.get('locale') or '').strip().lower()
    if requested:
        g.language = requested
        return g.language

    # Accept-Language order is the client's preference order
    accept_lang = request.headers.get('Accept-Language', '').lower()
    for part in accept_lang.split(','):
        code = part.split(';')[0].strip().split('-')[0]
        if code in SUPPORTED_LOCALES:
            g.language = code
            return g.language

    g.language = current_app.config.get('DEFAULT_LOCALE', 'sl')
    return g.language

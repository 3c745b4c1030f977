#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pattern QR - Flask Web Application
"""

import logging
from io import BytesIO
from typing import Optional

from flask import Flask, jsonify, request, send_file
from werkzeug.exceptions import RequestEntityTooLarge

from patternqr import EncodingError, InvalidInputError, GenerateRequest, generate, generate_svg
from patternqr.config import Settings

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Room for the form fields around the file itself
_FORM_OVERHEAD_BYTES = 64 * 1024


def _read_params(req) -> GenerateRequest:
    """Build a GenerateRequest from form/query values and the optional upload."""
    url = (req.values.get('url') or "").strip()
    text = req.values.get('customText')
    use_custom = (req.values.get('useCustomPattern') or "").lower() == 'true'
    tint = (req.values.get('tint') or "").lower() == 'true'
    mode: Optional[str] = req.values.get('mode')

    image, image_mime = None, None
    upload = req.files.get('customImage')
    if upload is not None and upload.filename:
        image = upload.read()
        image_mime = upload.mimetype

    if not mode:
        if use_custom and text:
            mode = 'text'
        elif use_custom and image is not None:
            mode = 'image'
        else:
            mode = 'none'

    return GenerateRequest(url=url, mode=mode, text=text, image=image,
                           image_mime=image_mime, tint=tint)


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = settings.max_upload_bytes + _FORM_OVERHEAD_BYTES
    app.config['PATTERNQR_SETTINGS'] = settings

    @app.errorhandler(InvalidInputError)
    @app.errorhandler(EncodingError)
    def handle_bad_request(ex):
        logger.info(f"Rejected request: {ex}")
        return jsonify({'error': str(ex)}), 400

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(ex):
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        return jsonify({'error': f"File too large. Maximum size is {limit_mb}MB."}), 413

    @app.route('/api/generate-qr', methods=['POST'])
    def generate_qr():
        params = _read_params(request)
        logger.info(f"QR generation request: mode={params.mode}, tint={params.tint}, "
                    f"has_image={params.image is not None}")
        try:
            result = generate(params, settings)
        except (InvalidInputError, EncodingError):
            raise
        except Exception as ex:
            logger.exception(f"QR generation failed: {ex}")
            return jsonify({'error': 'Failed to generate QR code'}), 500

        return jsonify({
            'success': True,
            'qrCode': result.data_url,
            'originalUrl': params.url,
            'isReadable': result.is_readable,
            'warning': result.warning,
        })

    @app.route('/api/export.svg', methods=['GET', 'POST'])
    def export_svg():
        params = _read_params(request)
        result = generate_svg(params, settings)
        return send_file(BytesIO(result.svg), as_attachment=True,
                         download_name='qrcode.svg',
                         mimetype='image/svg+xml')

    @app.route('/api/health', methods=['GET'])
    def health():
        return jsonify({'status': 'OK', 'message': 'QR Generator API is running'})

    return app


app = create_app()

if __name__ == "__main__":
    _settings = app.config['PATTERNQR_SETTINGS']
    app.run(port=_settings.port, debug=_settings.debug)

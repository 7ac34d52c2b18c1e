"""
Flask app for the chainring preview service
"""

import os
import tempfile
import threading
from flask import Flask, Response, jsonify, request
from flask_socketio import SocketIO, emit

from backend.render_engine import RenderEngine
from config import config

app = Flask(__name__)

# Configure app based on environment
config_name = os.environ.get('FLASK_ENV', 'development')
app.config.from_object(config[config_name])

socketio = SocketIO(app, cors_allowed_origins="*", async_mode='threading')

# Global engine instance, one render at a time
engine = RenderEngine()
render_lock = threading.Lock()


def frame_params(source):
    """Read fps and bpm from a mapping, falling back to the engine defaults"""
    fps = source.get('fps', engine.default_fps)
    bpm = source.get('bpm', engine.default_bpm)
    try:
        return int(fps), int(bpm)
    except (TypeError, ValueError):
        raise ValueError(f"fps and bpm must be integers, got fps={fps!r} bpm={bpm!r}")


def render(frame, fps, bpm):
    """Render one frame on the shared engine; caller holds render_lock"""
    engine.set_frame(frame, fps, bpm)
    engine.render_frame()
    print(f"Rendered frame {frame} (fps={fps}, bpm={bpm}), {engine.etc.frames_remaining} remaining")


@app.route('/')
def index():
    """Report engine status"""
    with render_lock:
        return jsonify(engine.get_status())


@app.route('/frame/<int:frame>.png')
def frame_png(frame):
    """Serve an 8-bit preview of one frame"""
    try:
        fps, bpm = frame_params(request.args)
        with render_lock:
            render(frame, fps, bpm)
            data = engine.preview_png()
            remaining = engine.etc.frames_remaining
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    response = Response(data, mimetype='image/png')
    response.headers['X-Frames-Remaining'] = str(remaining)
    return response


@app.route('/frame/<int:frame>.exr')
def frame_exr(frame):
    """Serve one frame as a linear float OpenEXR file"""
    try:
        fps, bpm = frame_params(request.args)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    with tempfile.TemporaryDirectory() as temp_dir:
        path = os.path.join(temp_dir, f'frame_{frame}.exr')
        with render_lock:
            try:
                render(frame, fps, bpm)
            except ValueError as e:
                return jsonify({'error': str(e)}), 400
            engine.export_exr(path)
            remaining = engine.etc.frames_remaining
        with open(path, 'rb') as f:
            data = f.read()

    response = Response(data, mimetype='image/x-exr')
    response.headers['Content-Disposition'] = f'attachment; filename=frame_{frame}.exr'
    response.headers['X-Frames-Remaining'] = str(remaining)
    return response


@socketio.on('connect')
def handle_connect():
    """Handle client connection"""
    print(f"Client connected: {request.sid}")
    emit('status', {'message': 'Connected to chainring preview', 'type': 'success'})


@socketio.on('disconnect')
def handle_disconnect():
    """Handle client disconnection"""
    print(f"Client disconnected: {request.sid}")


@socketio.on('render_frame')
def handle_render_frame(data):
    """Render one frame and send it back as a PNG data URL"""
    try:
        data = data or {}
        frame = int(data.get('frame', 0))
        fps, bpm = frame_params(data)
        with render_lock:
            render(frame, fps, bpm)
            image_data = engine.preview_data_url()
            remaining = engine.etc.frames_remaining
        emit('frame', {'image': image_data, 'frames_remaining': remaining})

    except (TypeError, ValueError) as e:
        emit('status', {'message': f'Error rendering frame: {str(e)}', 'type': 'error'})


def create_app(config_name=None):
    """Application factory pattern"""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app.config.from_object(config[config_name])
    return app


def main():
    print("Starting chainring preview service...")

    port = int(os.environ.get('PORT', 5001))
    host = os.environ.get('HOST', '0.0.0.0')

    if app.config['DEBUG']:
        print(f"Development mode: http://localhost:{port}")
        socketio.run(app, host=host, port=port, debug=True, allow_unsafe_werkzeug=True)
    else:
        print(f"Production mode: http://{host}:{port}")
        socketio.run(app, host=host, port=port, debug=False)


if __name__ == '__main__':
    main()

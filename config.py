import os

class Config:
    """Base configuration"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'chainring_preview_secret_change_in_production'

    # Render defaults
    CANVAS_SIZE = int(os.environ.get('CANVAS_SIZE', 256))
    FPS = int(os.environ.get('FPS', 60))
    BPM = int(os.environ.get('BPM', 60))
    TEETH_COUNT = int(os.environ.get('TEETH_COUNT', 32))
    OUTPUT_PATH = os.environ.get('OUTPUT_PATH', 'test.exr')

class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True

class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False

    def __init__(self):
        if not os.environ.get('SECRET_KEY'):
            raise ValueError("SECRET_KEY environment variable must be set in production")
        self.SECRET_KEY = os.environ.get('SECRET_KEY')

class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

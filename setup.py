from setuptools import setup, find_packages

setup(
    name='hand-breath',
    version='1.0.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.10',
    install_requires=[
        'setuptools',
        'numpy>=1.24',
        'opencv-python>=4.8',
        'mediapipe>=0.10.9,<0.10.30',
        'fastapi>=0.104.0',
        'uvicorn>=0.24.0',
        'websockets>=12.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'httpx>=0.25',
        ],
    },
    zip_safe=True,
    description='Hand-controlled breathing particle ring (MediaPipe + OpenCV)',
    license='MIT',
    entry_points={
        'console_scripts': [
            'hand_breath = hand_breath.main:main',
        ],
    },
)

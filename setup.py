from setuptools import setup, find_packages

setup(
    name='helperkit',
    version='0.1.0',
    description='Dot-path access to nested data and small helpers for web applications.',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    install_requires=[
        'click',
        'cryptography',
        'fastapi',
        'itsdangerous',
        'jinja2',
        'markupsafe',
        'platformdirs',
        'pydantic>=2',
        'python-multipart',
        'pyyaml',
        'uvicorn',
    ],
    extras_require={
        'test': [
            'pytest',
            'httpx',
        ],
    },
    entry_points={
        "console_scripts": [
            # 'helperkit' command will call the main() group in helperkit/cli.py
            "helperkit = helperkit.cli:main",
        ],
    },
    classifiers=[
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.10',
)

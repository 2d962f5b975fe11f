# setup.py

from setuptools import setup, find_packages

setup(
    name='eq-blindtest',
    version='1.0.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.9',
    install_requires=[
        'numpy',
        'scipy>=1.7',
        'matplotlib',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'eq-blindtest=eq_blindtest.cli.__main__:main',
        ],
    },
)

"""
DocGraph Setup Script

Install with: pip install -e .
"""

from setuptools import setup, find_packages

setup(
    name='docgraph',
    version='0.1.0',
    description='Knowledge graph extraction and transactional storage for document text',
    author='DocGraph Team',
    packages=find_packages(include=['docgraph', 'docgraph.*']),
    install_requires=[
        'sqlalchemy>=2.0.0',
        'aiosqlite>=0.19.0',
        'greenlet>=3.0.0',
        'pydantic>=2.5.0',
        'aiohttp>=3.9.0',
        'structlog>=23.1.0',
        'click>=8.1.0',
    ],
    extras_require={
        'postgres': [
            'asyncpg>=0.29.0',
        ],
        'test': [
            'pytest>=7.4.0',
            'pytest-asyncio>=0.21.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'docgraph=docgraph.cli:cli',
        ],
    },
    python_requires='>=3.11',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
        'Topic :: Text Processing',
    ],
)

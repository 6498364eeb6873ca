"""
Based on https://github.com/pypa/sampleproject

"""

# Always prefer setuptools over distutils
import pathlib
import re
import setuptools

here = pathlib.Path.absolute(pathlib.Path(__file__).parent)

version_text = here.joinpath("axilang", "__init__.py").read_text(encoding="utf-8")
version = re.search(r"__version__ = '(?P<version>[^']+)'", version_text).group('version')

install_requires=[
        'ink_extensions>=1.3.2',
        'lxml>=4.9.3',
        'plotink>=1.8.0',
        'pyserial>=3.5',
        'requests',
    ]

extras_require = {
    # The AxiDraw Python API is not on PyPI; it is distributed as a zip file.
    'axidraw': ['axicli @ https://cdn.evilmadscientist.com/dl/ad/public/AxiDraw_API.zip'],
    'test': ['mock', 'pyfakefs>=5.0'],
}

setuptools.setup(
    name='axilang',
    version=version,
    description='AxiLang: a scripting language for the AxiDraw',
    long_description=here.joinpath("README.md").read_text(encoding="utf-8"),
    long_description_content_type='text/markdown',
    license='MIT',
    python_requires='>=3.8',
    packages=setuptools.find_packages(exclude=['contrib', 'docs', 'test', 'test.*']),
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        'console_scripts': [
            'axilang=axilang.__main__:main',
        ],
    },
)

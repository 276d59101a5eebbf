from setuptools import setup, find_namespace_packages

setup(name='pygctp',
    version=0.1,
    description='Map projections and earth transforms for gridded and swath satellite data',
    packages=find_namespace_packages(include=['pygctp', 'pygctp.*']),
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    include_package_data=True,
    python_requires='>=3.9',
    install_requires=[
        'numpy',
        'scipy',
        'pyproj>=3.0',
        'xarray',
        'scikit-learn',
        'affine>=3.0',
        'shapely>=2.0',
        'pint',
    ],
    extras_require={
        'test': ['pytest'],
    },
    )

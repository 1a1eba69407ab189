from setuptools import setup, find_packages
from codecs import open

setup(
    name='openid-ax',
    version='0.1.0',
    description='OpenID 2.0 authentication requests and Attribute Exchange for Relying Parties.',
    long_description=open('README.md', encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    url='https://github.com/isagalaev/sm-openid',
    author='Ivan Sagalaev',
    author_email='maniac@softwaremaniacs.org',
    license='Apache',
    keywords='openid consumer attribute exchange',

    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
    ],

    python_requires='>=3.6',
    install_requires=['html5lib'],
    packages=find_packages(exclude=['examples', 'openid_ax.test']),
)

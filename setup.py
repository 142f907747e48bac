from setuptools import setup, find_packages

with open('README.md') as readme_file:
    README = readme_file.read()

with open('HISTORY.md') as history_file:
    HISTORY = history_file.read()

setup_args = dict(
    name='django-surrogate-cache',
    version='1.0.0',
    description='Surrogate-Key and Surrogate-Control headers and Fastly purging for Django.',
    long_description_content_type='text/markdown',
    long_description=README + '\n\n' + HISTORY,
    license='MIT',
    packages=find_packages(exclude=['tests', 'tests.*']),
    keywords=['Django', 'Fastly', 'CDN', 'Surrogate-Key', 'purge'],
    classifiers = [
        'Programming Language :: Python :: 3 :: Only',
        'Framework :: Django',
        'Operating System :: OS Independent',
        'License :: OSI Approved :: MIT License',
    ]
)

install_requires = [
    'django>=3.2',
    'httpx>=0.23',
]

if __name__ == '__main__':
    setup(**setup_args,
          install_requires=install_requires,
          python_requires='>=3.9',
          extras_require={
              'dev': [
                  'pytest',
                  'pytest-django',
                  'pytest-cov'
              ]
          }
    )
